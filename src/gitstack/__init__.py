"""gitstack: manage stacks of dependent git branches."""
