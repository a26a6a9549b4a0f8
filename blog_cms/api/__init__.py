"""HTTP request-handling layer: public feed, editor CRUD, login, uploads."""
