"""Graph connector service: push JSON documents into Microsoft Graph connections."""
