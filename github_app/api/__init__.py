"""Resource-specific GitHub API wrappers with caching and TTL policy.

Each module in this package owns:
- the API calls for one resource (via GitHubAPIClient + pagination.iter_json_list)
- the cache key format for that resource
- the TTL policy for that resource
"""
