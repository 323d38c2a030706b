"""
Prefect flows for the data pipeline.

Flows:
- fetch: Download raw occurrences from GBIF and iNaturalist into ``raw/``
- build: Reconcile, clean and score; write tables and the HTML report

Usage (local):
    python -m conservation_priority.flows.fetch
    python -m conservation_priority.flows.build

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    prefect deployment run 'fetch-occurrences/default'
"""
