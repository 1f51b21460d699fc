"""
Tests for the svcrotate package. None of these touch a real host; the Windows-specific
collaborators are replaced with the fakes in test_svcrotate.fakes.
"""
