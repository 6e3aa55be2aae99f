"""
One-off provisioning for the Supabase project: storage buckets and
row-level-security policies. Both are safe to re-run.
"""
