"""
Discovery feature - API route modules.

One module per entity collection:
- outcomes (tree roots)
- opportunities (customer needs; evidence links, RICE)
- solutions (with assumptions)
- interviews and evidences (research data)
"""
