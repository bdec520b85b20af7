"""
Agent profile model for an office directory.

Shows the usual way to define a model: class-level defaults, a validate()
override, and handlers bound to path, wildcard and array events.
"""

import logging
from typing import Any, Dict, Optional

from pathstate import DeepModel

logger = logging.getLogger(__name__)

VALID_CLEARANCES = ("none", "secret", "top-secret")


class AgentProfile(DeepModel):
    """Directory entry for one field agent."""

    def defaults(self) -> Dict[str, Any]:
        return {
            'clearance': 'none',
            'name': {'first': '', 'last': ''},
            'addresses': [],
        }

    def validate(self, attributes: Dict[str, Any], options: Dict[str, Any]) -> Optional[str]:
        if attributes.get('clearance') not in VALID_CLEARANCES:
            return f"Unknown clearance {attributes.get('clearance')!r}"
        for address in attributes.get('addresses', []):
            if len(address.get('state', '')) != 2:
                return "Use a 2 letter state abbreviation"
        return None


def log_name_change(model: AgentProfile, name: Dict[str, Any], options: Dict[str, Any]) -> None:
    logger.info(f"Agent {model.id} is now {name['first']} {name['last']}")


def log_new_address(model: AgentProfile, address: Dict[str, Any]) -> None:
    logger.info(f"Agent {model.id} moved to {address['city']}, {address['state']}")


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    agent = AgentProfile({'id': 7, 'name': {'first': 'Sterling', 'last': 'Archer'}})
    agent.on('change:name.*', log_name_change)
    agent.on('add:addresses', log_new_address)

    agent.set('name.first', 'Lana')
    agent.add('addresses', {'city': 'New York', 'state': 'NY'})

    if not agent.set('clearance', 'cosmic'):
        logger.info(f"Rejected: {agent.validation_error.error}")

    logger.info(f"Changed in last update: {agent.changed_attributes()}")
    logger.info(f"Profile: {agent.to_json()}")


if __name__ == "__main__":
    main()
