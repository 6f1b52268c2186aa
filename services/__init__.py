"""Application lifecycle, role queries and the operation dispatcher."""
