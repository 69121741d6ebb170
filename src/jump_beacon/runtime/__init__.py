"""Runtime services shared by the core and adapters."""
