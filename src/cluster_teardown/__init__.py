"""
cluster_teardown

This package discovers and tears down the cloud resources owned by a cluster.

We keep modules small and well separated:
core contains the Resource record, errors, serialization and audit logging
providers contains the cloud provider interfaces and in memory backends
resources contains per kind behaviors, the kind registry and dispatch
discovery contains the discovery context and the orchestrator
teardown contains the engine that dumps or deletes a discovered cluster
"""
