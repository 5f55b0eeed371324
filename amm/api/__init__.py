"""HTTP quote service for the AMM."""
