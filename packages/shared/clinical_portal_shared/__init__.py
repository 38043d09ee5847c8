"""Request and response schemas shared by the portal server and its clients."""
