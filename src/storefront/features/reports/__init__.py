"""Dashboard reporting engine for the storefront admin.

This package aggregates the transaction store into the statistics shown on
the admin and customer dashboards: invoice status counts, revenue series,
best-seller rankings, customer acquisition and retention, and date-range
sales summaries.

Every report is a stateless, read-only async function in ``service`` that
takes explicit parameters and returns a fixed-shape Pydantic model from
``schemas``. Caller input errors and store failures are raised as the
exceptions in ``errors``."""
