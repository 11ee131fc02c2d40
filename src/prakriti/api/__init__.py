"""HTTP API for Prakriti Mitra."""
