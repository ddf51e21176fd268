"""Statement parsers (CSV, flattened PDF text, credit-card) and the loading facade."""
