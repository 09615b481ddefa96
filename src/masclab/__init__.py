"""`masclab` - Analysis modules over the MASC snowflake image cache.

Subpackages:
- schemas: Layered configuration (param < user < CLI)
- contracts: Failure taxonomy and runtime checks
- cache: Per-day record store, flake index, shared features, commits
- modules: Module interface, registry, adapter, built-in modules
- pipeline: Module runner and orchestrator
- cli: Command-line entry points
"""

__version__ = "0.1.0"
