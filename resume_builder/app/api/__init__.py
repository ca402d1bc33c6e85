"""JSON and HTMX endpoints for accounts, the resume workspace and templates."""
