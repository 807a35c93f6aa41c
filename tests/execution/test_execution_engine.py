import pytest
from unittest.mock import call

from web3 import Web3
from web3.exceptions import TimeExhausted

from testnet_cycler.core.error_handling import (
    ConfirmationError, ExecutionError, InsufficientBalanceError, SubmissionError
)
from testnet_cycler.core.types import AttemptOutcome, BalanceSource, OperationKind
from testnet_cycler.execution.execution_engine import TransactionExecutor
from tests.utils.test_utils import (
    GWEI, TEST_ADDRESS, TX_HASH, TX_HASH_BYTES, create_executor, create_mock_receipt,
    create_mock_web3, create_operation
)

@pytest.mark.asyncio
async def test_execute_success_first_attempt(mock_web3, mock_account, mock_sleep):
    """Test a confirmed transaction on the first attempt"""
    executor = create_executor(mock_web3, mock_account, sleep=mock_sleep)

    receipt = await executor.execute(create_operation())

    assert receipt.tx_hash == TX_HASH
    assert receipt.attempts == 1
    assert receipt.block_number == 1234
    assert receipt.fee_paid == 45000 * 2 * GWEI
    assert receipt.operation == "wrap"
    assert [a.outcome for a in executor.attempts] == [AttemptOutcome.CONFIRMED]
    mock_web3.eth.send_raw_transaction.assert_awaited_once()
    mock_sleep.assert_not_awaited()

@pytest.mark.asyncio
async def test_nonce_read_from_pending_block(mock_web3, mock_account):
    executor = create_executor(mock_web3, mock_account)

    await executor.execute(create_operation())

    mock_web3.eth.get_transaction_count.assert_awaited_once_with(TEST_ADDRESS, 'pending')
    tx = mock_account.sign_transaction.call_args.args[0]
    assert tx['nonce'] == 7

@pytest.mark.asyncio
async def test_retry_then_success(mock_web3, mock_sleep):
    """Test two submission failures followed by success uses three attempts"""
    mock_web3.eth.send_raw_transaction.side_effect = [
        Exception("nonce too low"),
        Exception("replacement transaction underpriced"),
        TX_HASH_BYTES,
    ]
    executor = create_executor(mock_web3, sleep=mock_sleep)

    receipt = await executor.execute(create_operation())

    assert receipt.attempts == 3
    assert [a.outcome for a in executor.attempts] == [
        AttemptOutcome.FAILED, AttemptOutcome.FAILED, AttemptOutcome.CONFIRMED
    ]
    assert mock_sleep.await_args_list == [call(5.0), call(5.0)]
    # Fresh gas and nonce on every attempt
    assert mock_web3.eth.get_transaction_count.await_count == 3
    assert mock_web3.eth.get_block.await_count == 3

@pytest.mark.asyncio
async def test_always_failing_raises_after_max_retries(mock_web3, mock_sleep):
    mock_web3.eth.send_raw_transaction.side_effect = Exception("rpc unavailable")
    executor = create_executor(mock_web3, sleep=mock_sleep)

    with pytest.raises(ExecutionError) as exc_info:
        await executor.execute(create_operation())

    assert exc_info.value.attempts == 3
    assert exc_info.value.operation == "wrap"
    assert isinstance(exc_info.value.last_error, SubmissionError)
    assert mock_web3.eth.send_raw_transaction.await_count == 3
    assert mock_sleep.await_count == 2

@pytest.mark.asyncio
async def test_max_retries_override(mock_web3, mock_sleep):
    mock_web3.eth.send_raw_transaction.side_effect = Exception("rpc unavailable")
    executor = create_executor(mock_web3, sleep=mock_sleep)

    with pytest.raises(ExecutionError) as exc_info:
        await executor.execute(create_operation(), max_retries=1)

    assert exc_info.value.attempts == 1
    mock_sleep.assert_not_awaited()

@pytest.mark.asyncio
async def test_reverted_receipt_is_retried(mock_sleep):
    web3 = create_mock_web3(receipt=create_mock_receipt(status=0))
    executor = create_executor(web3, sleep=mock_sleep)

    with pytest.raises(ExecutionError) as exc_info:
        await executor.execute(create_operation())

    assert isinstance(exc_info.value.last_error, ConfirmationError)
    assert exc_info.value.last_error.tx_hash == TX_HASH
    assert web3.eth.send_raw_transaction.await_count == 3
    assert all(a.outcome == AttemptOutcome.FAILED for a in executor.attempts)

@pytest.mark.asyncio
async def test_receipt_timeout_marks_attempt_abandoned(mock_web3, mock_sleep):
    mock_web3.eth.wait_for_transaction_receipt.side_effect = [
        TimeExhausted("not in chain after 180 seconds"),
        create_mock_receipt(),
    ]
    executor = create_executor(mock_web3, sleep=mock_sleep, receipt_timeout=180.0)

    receipt = await executor.execute(create_operation())

    assert receipt.attempts == 2
    assert executor.attempts[0].outcome == AttemptOutcome.ABANDONED
    assert executor.attempts[0].tx_hash == TX_HASH
    mock_web3.eth.wait_for_transaction_receipt.assert_awaited_with(TX_HASH, timeout=180.0)

@pytest.mark.asyncio
async def test_insufficient_native_balance_sends_nothing(mock_sleep):
    web3 = create_mock_web3(native_balance=Web3.to_wei(0.001, 'ether'))
    executor = create_executor(web3, sleep=mock_sleep)

    with pytest.raises(InsufficientBalanceError) as exc_info:
        await executor.execute(create_operation(value=Web3.to_wei(0.01, 'ether')))

    assert exc_info.value.required == Web3.to_wei(0.01, 'ether')
    assert exc_info.value.available == Web3.to_wei(0.001, 'ether')
    web3.eth.send_raw_transaction.assert_not_awaited()
    web3.eth.estimate_gas.assert_not_awaited()
    assert executor.attempts == []

@pytest.mark.asyncio
async def test_insufficient_token_balance_sends_nothing(mock_sleep):
    web3 = create_mock_web3(token_balance=0)
    executor = create_executor(web3, sleep=mock_sleep)
    operation = create_operation(OperationKind.UNWRAP, balance_source=BalanceSource.TOKEN)

    with pytest.raises(InsufficientBalanceError) as exc_info:
        await executor.execute(operation)

    assert exc_info.value.asset == "token"
    web3.eth.call.assert_awaited_once()
    web3.eth.send_raw_transaction.assert_not_awaited()

@pytest.mark.asyncio
async def test_balance_read_failure_is_terminal(mock_web3, mock_sleep):
    mock_web3.eth.get_balance.side_effect = Exception("timeout")
    executor = create_executor(mock_web3, sleep=mock_sleep)

    with pytest.raises(ExecutionError) as exc_info:
        await executor.execute(create_operation())

    assert exc_info.value.attempts == 0
    mock_web3.eth.send_raw_transaction.assert_not_awaited()

@pytest.mark.asyncio
async def test_balance_check_disabled(mock_sleep):
    web3 = create_mock_web3(native_balance=0)
    executor = create_executor(web3, sleep=mock_sleep, check_balance=False)

    receipt = await executor.execute(create_operation())

    assert receipt.attempts == 1
    web3.eth.get_balance.assert_not_awaited()

@pytest.mark.asyncio
async def test_claim_without_balance_source_skips_check(mock_web3):
    executor = create_executor(mock_web3)

    await executor.execute(create_operation(OperationKind.CLAIM, balance_source=BalanceSource.NONE))

    mock_web3.eth.get_balance.assert_not_awaited()
    mock_web3.eth.call.assert_not_awaited()

@pytest.mark.asyncio
async def test_get_token_balance_decodes_word(mock_web3):
    executor = create_executor(mock_web3)

    balance = await executor.get_balance(create_operation(balance_source=BalanceSource.TOKEN))

    assert balance == Web3.to_wei(10, 'ether')
    request = mock_web3.eth.call.await_args.args[0]
    assert request['data'].startswith("0x70a08231")

def test_invalid_retry_budget(mock_web3, mock_account):
    with pytest.raises(ValueError):
        create_executor(mock_web3, mock_account, max_retries=0)

def test_executor_address(mock_web3, mock_account):
    executor = create_executor(mock_web3, mock_account)
    assert isinstance(executor, TransactionExecutor)
    assert executor.address == TEST_ADDRESS
