"""Console progress rendering."""
