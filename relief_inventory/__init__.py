"""Relief supply inventory coordination service."""
