"""Tables, migrations and plain CRUD queries over the versioned store."""
