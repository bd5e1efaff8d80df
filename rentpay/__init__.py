"""Backend de paiement des loyers: sessions Stripe Checkout et suivi des règlements (Supabase)."""
