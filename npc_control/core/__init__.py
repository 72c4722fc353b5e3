"""Controllers, decision engine, feedback learning and the service facade."""
