"""MedVault — patient files with guest download authorization."""
