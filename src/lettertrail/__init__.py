"""Track incoming and outgoing correspondence from receipt to dispatch."""
