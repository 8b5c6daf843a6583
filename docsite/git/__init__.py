"""Version-control collaborators: history queries and hosting publish."""
