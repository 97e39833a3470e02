"""Schedule advisor: conflict detection and scheduling suggestions for cleaning rosters.

Modules:
- config: load and validate advisor configuration (YAML or JSON)
- domain: immutable entities, SQLAlchemy models and repositories
- services: clock arithmetic, workload attribution, worker availability
- engine: conflict detectors, resolutions, validation gate, suggestions
- io: CSV import/export
- report: text reports for the CLI
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "domain",
    "services",
    "engine",
    "io",
    "report",
    "cli",
]
