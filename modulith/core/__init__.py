"""Core building blocks shared by every module: host, registry, settings, database."""
