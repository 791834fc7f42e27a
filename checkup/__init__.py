"""checkup - repository health checks for TypeScript/JavaScript projects."""

__version__ = "1.0.0"
