# SPDX-License-Identifier: BUSL-1.1
"""aostack - provisioning for the agent orchestrator cluster environment."""

__version__ = "0.3.0"
