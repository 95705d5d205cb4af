"""Flight school scheduling and weather-disruption simulator."""
