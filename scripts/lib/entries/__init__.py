"""Entry parsing, normalization, querying and table rendering."""
