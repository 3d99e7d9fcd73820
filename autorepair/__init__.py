"""
Cassandra Autorepair - Kubernetes Cassandra Maintenance

Finds Cassandra pods annotated for automatic repair and runs
`nodetool repair -pr` inside each of them, relaying the output to the log.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- api: Shared data models
- selection: Pod eligibility and container selection
- cluster: Kubernetes connection and pod listing
- executor: Remote exec and output relay
- repair: Orchestration loop
"""

__version__ = "1.0.0"
