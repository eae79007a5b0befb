"""Services layered on the git data API client: tree cache, path resolution and commit creation."""
