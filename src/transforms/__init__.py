"""Pure account transforms: username dedup and ratio distribution."""
