"""Infrastructure layer - HTTP client, rate limiting, logging, wiring."""
