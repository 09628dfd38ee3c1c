"""Reporting and export endpoints for Stockroom

Three report shapes are served: sales, items and a single customer's
ledger. Each returns one page of records together with a summary computed
over the full filtered set. Any report can also be exported as an Excel
workbook or a paginated PDF, downloaded directly or emailed.

Request parameters are normalized in ``filters``, read through ``readers``,
summarized by ``aggregation``, rendered by ``rendering`` and mailed by
``delivery``. ``service`` ties the steps together for the router and the CLI."""
