"""Routing core — level policy, the entry router and its drain loop."""
