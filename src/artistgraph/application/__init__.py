"""Application layer - services that orchestrate Spotify calls and the graph."""
