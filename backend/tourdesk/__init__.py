"""Tour Desk - travel agency back office."""
