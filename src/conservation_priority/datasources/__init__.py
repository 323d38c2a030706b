"""Occurrence data sources.

Each subdirectory is one provider with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants, paging / rate limiting
    └── {feature}.py      # Fetch + flatten functions

Fetch functions return *raw rows*: flat dicts keyed by the provider's own
column names. Mapping onto the canonical schema is the job of
``cleaning.reconcile``, never of the data source.

Adding a new datasource
-----------------------
1. Create ``datasources/{name}/`` with the files above, using the shared
   session from ``services.http``.
2. Add a ``reconcile_{name}`` function in ``cleaning/reconcile.py``.
3. Wire a ``@task`` into ``flows/fetch.py`` that stores the rows in the
   ``raw/`` tier.
4. Add tests in ``tests/test_{name}.py`` (mock ``session.get``).
"""
