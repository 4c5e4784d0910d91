"""Resource bindings for the generic API, one package per engine API and version."""
