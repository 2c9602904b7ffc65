"""Fetch provider backed by the Azure CLI.

This module runs ``az`` commands in a subprocess with a bounded timeout,
validates their JSON output and retries transient failures with
exponential backoff.
"""

import logging
import subprocess
from typing import Any, Dict, List, Optional

from .auth import AzureSettings
from .errors import ErrorKind, ProviderCommandError, ProviderError, ProviderTimeoutError
from .models import ProviderSnapshot, Subscription
from .retry_logic import RetryPolicy, is_transient_provider_error
from .validation import parse_account, parse_resources

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 120

# JMESPath projection keeping only the fields the normalizer reads
RESOURCE_QUERY = (
    "[].{id: id, name: name, type: type, location: location, "
    "resourceGroup: resourceGroup, tags: tags, kind: kind, "
    "managedBy: managedBy, createdTime: createdTime, sku: sku, "
    "properties: properties.{provisioningState: provisioningState, "
    "powerState: powerState, state: state, creationDate: creationDate, "
    "hardwareProfile: hardwareProfile.{vmSize: vmSize}}}"
)


class AzureCliProvider:
    """Reads the subscription and its resources through the ``az`` CLI.

    Every command runs with a timeout (the child process is killed when it
    expires) and is wrapped in the retry policy. Only transient failures
    (timeouts, throttling, server errors) are retried; malformed output
    raises ResponseValidationError straight away.

    Example:
        >>> provider = AzureCliProvider(SettingsLoader().get_settings())
        >>> snapshot = provider.fetch()
        >>> print(f"{len(snapshot.resources)} resources")
    """

    def __init__(
        self,
        settings: AzureSettings,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        retry: Optional[RetryPolicy] = None,
    ):
        """Initialize the provider.

        Args:
            settings: CLI path and optional subscription pin
            timeout: Per-command timeout in seconds
            retry: Retry policy for transient failures
        """
        self._settings = settings
        self._timeout = timeout
        self._retry = retry or RetryPolicy()

    def get_subscription(self) -> Subscription:
        """Return the active (or pinned) subscription.

        Raises:
            ProviderError: If the command keeps failing
            ResponseValidationError: If the output is malformed
        """
        logger.info("Getting Azure subscription")
        stdout = self._run_with_retry(['account', 'show', '--output', 'json'])
        subscription = Subscription.from_account(parse_account(stdout))
        logger.info(f"Subscription retrieved: {subscription.subscription_name}")
        return subscription

    def get_resources(self) -> List[Dict[str, Any]]:
        """Return the raw resource records of the subscription.

        Raises:
            ProviderError: If the command keeps failing
            ResponseValidationError: If the output is malformed
        """
        logger.info("Getting Azure resources")
        stdout = self._run_with_retry(
            ['resource', 'list', '--query', RESOURCE_QUERY, '--output', 'json']
        )
        resources = parse_resources(stdout)
        logger.info(f"Retrieved {len(resources)} resources")
        return resources

    def fetch(self) -> ProviderSnapshot:
        """Fetch subscription context and resources in one cycle."""
        subscription = self.get_subscription()
        return ProviderSnapshot(subscription=subscription, resources=self.get_resources())

    def _run_with_retry(self, args: List[str]) -> str:
        def on_retry(error: BaseException, attempt: int, delay: float) -> None:
            logger.warning(f"Retrying 'az {args[0]} {args[1]}' (attempt {attempt}, next in {delay}s)")

        return self._retry.call(
            lambda: self._run(args),
            should_retry=is_transient_provider_error,
            on_retry=on_retry,
        )

    def _run(self, args: List[str]) -> str:
        command = [self._settings.cli_path] + args
        if self._settings.subscription_id:
            command += ['--subscription', self._settings.subscription_id]
        display = ' '.join(['az'] + args[:2])

        logger.debug(f"Running {display} (timeout {self._timeout}s)")
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            raise ProviderTimeoutError(display, self._timeout)
        except FileNotFoundError:
            raise ProviderError(
                f"Azure CLI not found at '{self._settings.cli_path}'",
                kind=ErrorKind.NOT_FOUND,
            )

        if completed.returncode != 0:
            raise ProviderCommandError(display, completed.returncode, completed.stderr or "")

        return completed.stdout
