"""
action_executor.py: Module for executing planned actions with dry-run support
"""
import logging
from typing import List, Dict, Any
from .utils import info, success, error

logger = logging.getLogger("infrakit.executor")


class ActionExecutor:
    """
    ActionExecutor: Class responsible for executing action plans with dry-run support
    """

    def execute_actions(self, actions: List[Dict[str, Any]], dry_run: bool = False) -> bool:
        """
        Execute a list of actions serially, stopping at the first failure
        :param actions: List of action dictionaries ({'desc', 'func', 'args', 'kwargs'})
        :param dry_run: Whether to execute in dry-run mode
        :return: True if all actions completed successfully (or if dry_run)
        """
        if not actions:
            info("Nothing to do.")
            return True

        info("Planned actions:")
        for act in actions:
            print(f"  {act['desc']}")

        if dry_run:
            info("DRY RUN: No changes applied")
            return True

        for act in actions:
            func = act['func']
            args = act.get('args', ())
            kwargs = act.get('kwargs', {})

            try:
                func(*args, **kwargs)
            except Exception as e:
                error(f"Failed to execute: {act['desc']} → {e}")
                logger.debug("Action failed", exc_info=True)
                error("One or more actions failed")
                return False
        success("All actions completed")
        return True
