"""Generator services: nullability scanning, resolution and code generation."""
