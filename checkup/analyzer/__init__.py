"""Export usage analysis for TypeScript/JavaScript projects."""
