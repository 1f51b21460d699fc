"""
Interface definitions for svcrotate's external collaborators.

(ABC = Abstract Base Classes)
"""


from . import inventory, prompts, services, vaults


__author__ = 'Aaron Hosford'
