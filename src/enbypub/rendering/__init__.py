"""Template and Markdown rendering."""
