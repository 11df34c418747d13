"""HTTP API layer: shared dependencies and the root router.

The router is imported from ``tbsa.api.router`` so that modules can
depend on ``tbsa.api.dependencies`` without loading every route.
"""
