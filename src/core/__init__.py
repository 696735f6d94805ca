"""Domain core: configuration, models, errors and token stores."""
