"""intune music backend."""
