"""comp-audit: component usage and dependency scanner for design documents."""
