"""patstore: personal access token store."""
