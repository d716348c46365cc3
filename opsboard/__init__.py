"""OpsBoard Reports.

Backend jobs of the OpsBoard IT-operations dashboard. The dashboard itself
talks directly to a hosted BaaS; this package hosts the work that runs on the
server side of it.

Core subpackages
----------------

- ``opsboard.reports``: the Bacula daily report pipeline (fetch, normalize,
  aggregate, render, send, record), scheduled report dispatching and the run
  health summary.
- ``opsboard.functions``: client for the BaaS serverless-function endpoint,
  used to reach the Bacula proxy and the WhatsApp gateway.
- ``opsboard.core``: logging, Logfire monitoring and the relational store
  (SQLModel entities and async repositories).
- ``opsboard.server``: the FastAPI application exposing the pipeline.
"""
