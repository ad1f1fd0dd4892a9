"""Server-side text-generation proxy (benchmarks and project suggestions)."""
