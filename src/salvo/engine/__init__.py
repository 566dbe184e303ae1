"""Grid, ship and match model for Salvo."""
