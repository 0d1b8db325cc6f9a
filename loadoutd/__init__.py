"""loadoutd: REST API and command line for the loadout compiler."""
