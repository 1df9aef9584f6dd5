"""Interactive command-line client for ragdesk."""
