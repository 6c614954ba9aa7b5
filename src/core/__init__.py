"""Domain models, errors and resource keys."""
