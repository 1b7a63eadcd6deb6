"""
Domain services for ContactGraph.

Contains the main business logic services:
- graph_view: Graph construction, force layout, viewport and selection
- contacts: Loading, cache enrichment and ranking of contacts
"""
