"""Client-side engine for an e-voting front end."""
