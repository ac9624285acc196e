"""Business services: keyword expansion, matching, pricing and comparison."""
