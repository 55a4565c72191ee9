"""Static node-type catalog.

The catalog declares ports for every node type the editor offers. The engine
itself does not need it to dispatch (handlers hard-code their behavior), but
hosts use it to list nodes, lint graphs and render ports, and the port ids here
are the ids handlers read from their inputs and write to their outputs.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .models import NodeCategory, NodeDefinition, Port, PortDataType, PortDirection


def _in(
    port_id: str,
    name: str,
    data_type: PortDataType,
    *,
    required: bool = True,
    default: Optional[Any] = None,
) -> Port:
    return Port(
        id=port_id,
        name=name,
        direction=PortDirection.INPUT,
        dataType=data_type,
        required=required,
        defaultValue=default,
    )


def _out(port_id: str, name: str, data_type: PortDataType) -> Port:
    return Port(id=port_id, name=name, direction=PortDirection.OUTPUT, dataType=data_type)


T = PortDataType
C = NodeCategory

_CATEGORY_COLORS: Dict[NodeCategory, str] = {
    C.RPC: "#a855f7",
    C.WALLET: "#f97316",
    C.TRANSACTION: "#3b82f6",
    C.TOKEN: "#10b981",
    C.MATH: "#ffe66d",
    C.LOGIC: "#ec4899",
    C.INPUT: "#06b6d4",
    C.OUTPUT: "#8b5cf6",
    C.UTILITY: "#6b7280",
}


def _node(
    node_type: str,
    category: NodeCategory,
    label: str,
    description: str,
    inputs: List[Port],
    outputs: List[Port],
) -> NodeDefinition:
    return NodeDefinition(
        type=node_type,
        category=category,
        label=label,
        description=description,
        inputs=inputs,
        outputs=outputs,
        color=_CATEGORY_COLORS.get(category),
    )


_CONNECTION = _in("connection", "Connection", T.CONNECTION)

NODE_DEFINITIONS: List[NodeDefinition] = [
    # RPC
    _node(
        "rpc-connection", C.RPC, "RPC Connection", "Connect to a Solana RPC endpoint",
        [_in("endpoint", "Endpoint", T.STRING)],
        [_out("connection", "Connection", T.CONNECTION)],
    ),
    _node(
        "get-balance", C.RPC, "Get Balance", "Get SOL balance of an account",
        [_CONNECTION, _in("publicKey", "Public Key", T.PUBLICKEY)],
        [_out("balance", "Balance (SOL)", T.NUMBER), _out("lamports", "Lamports", T.NUMBER)],
    ),
    _node(
        "get-account-info", C.RPC, "Get Account Info", "Fetch account information",
        [_CONNECTION, _in("publicKey", "Public Key", T.PUBLICKEY)],
        [
            _out("accountInfo", "Account Info", T.ACCOUNT),
            _out("owner", "Owner", T.PUBLICKEY),
            _out("lamports", "Lamports", T.NUMBER),
        ],
    ),
    _node(
        "get-slot", C.RPC, "Get Slot", "Get current slot number",
        [_CONNECTION],
        [_out("slot", "Slot", T.NUMBER)],
    ),
    _node(
        "get-block-height", C.RPC, "Get Block Height", "Get current block height",
        [_CONNECTION],
        [_out("blockHeight", "Block Height", T.NUMBER)],
    ),
    _node(
        "get-recent-blockhash", C.RPC, "Get Recent Blockhash", "Get recent blockhash for transactions",
        [_CONNECTION],
        [_out("blockhash", "Blockhash", T.STRING), _out("lastValidBlockHeight", "Last Valid Block Height", T.NUMBER)],
    ),
    # Wallet
    _node(
        "wallet-connect", C.WALLET, "Connected Wallet", "Get the connected wallet public key",
        [],
        [_out("publicKey", "Public Key", T.PUBLICKEY), _out("connected", "Is Connected", T.BOOLEAN)],
    ),
    _node(
        "wallet-sign", C.WALLET, "Sign Transaction", "Sign a transaction with connected wallet",
        [_in("transaction", "Transaction", T.TRANSACTION)],
        [_out("signedTransaction", "Signed Transaction", T.TRANSACTION)],
    ),
    _node(
        "wallet-sign-message", C.WALLET, "Sign Message", "Sign a message with connected wallet",
        [_in("message", "Message", T.STRING)],
        [_out("signature", "Signature", T.STRING)],
    ),
    # Transaction
    _node(
        "create-transaction", C.TRANSACTION, "Create Transaction", "Create a new transaction",
        [_in("feePayer", "Fee Payer", T.PUBLICKEY), _in("blockhash", "Blockhash", T.STRING)],
        [_out("transaction", "Transaction", T.TRANSACTION)],
    ),
    _node(
        "add-instruction", C.TRANSACTION, "Add Instruction", "Add an instruction to a transaction",
        [_in("transaction", "Transaction", T.TRANSACTION), _in("instruction", "Instruction", T.INSTRUCTION)],
        [_out("transaction", "Transaction", T.TRANSACTION)],
    ),
    _node(
        "send-transaction", C.TRANSACTION, "Send Transaction", "Send and confirm a transaction",
        [_CONNECTION, _in("transaction", "Transaction", T.TRANSACTION)],
        [_out("signature", "Signature", T.STRING), _out("confirmed", "Confirmed", T.BOOLEAN)],
    ),
    _node(
        "transfer-sol", C.TRANSACTION, "Transfer SOL", "Create a SOL transfer instruction",
        [
            _in("from", "From", T.PUBLICKEY),
            _in("to", "To", T.PUBLICKEY),
            _in("amount", "Amount (SOL)", T.NUMBER),
        ],
        [_out("instruction", "Instruction", T.INSTRUCTION)],
    ),
    # Token
    _node(
        "get-token-accounts", C.TOKEN, "Get Token Accounts", "Get all token accounts for an owner",
        [_CONNECTION, _in("owner", "Owner", T.PUBLICKEY)],
        [_out("accounts", "Token Accounts", T.ARRAY)],
    ),
    _node(
        "get-token-balance", C.TOKEN, "Get Token Balance", "Get balance of a token account",
        [_CONNECTION, _in("tokenAccount", "Token Account", T.PUBLICKEY)],
        [_out("balance", "Balance", T.NUMBER), _out("decimals", "Decimals", T.NUMBER)],
    ),
    _node(
        "transfer-token", C.TOKEN, "Transfer Token", "Create a token transfer instruction",
        [
            _in("source", "Source", T.PUBLICKEY),
            _in("destination", "Destination", T.PUBLICKEY),
            _in("owner", "Owner", T.PUBLICKEY),
            _in("amount", "Amount", T.NUMBER),
        ],
        [_out("instruction", "Instruction", T.INSTRUCTION)],
    ),
    _node(
        "get-token-metadata", C.TOKEN, "Get Token Metadata", "Get basic metadata of a token mint",
        [_CONNECTION, _in("mint", "Mint", T.PUBLICKEY)],
        [
            _out("name", "Name", T.STRING),
            _out("symbol", "Symbol", T.STRING),
            _out("decimals", "Decimals", T.NUMBER),
            _out("supply", "Supply", T.NUMBER),
        ],
    ),
    _node(
        "get-token-info", C.TOKEN, "Get Token Info", "Get mint authorities, supply and decimals",
        [_CONNECTION, _in("mint", "Mint", T.PUBLICKEY)],
        [
            _out("mintAuthority", "Mint Authority", T.PUBLICKEY),
            _out("freezeAuthority", "Freeze Authority", T.PUBLICKEY),
            _out("supply", "Supply", T.NUMBER),
            _out("decimals", "Decimals", T.NUMBER),
        ],
    ),
    _node(
        "check-token-holders", C.TOKEN, "Check Token Holders", "List accounts holding a token mint",
        [_CONNECTION, _in("mint", "Mint", T.PUBLICKEY)],
        [_out("holders", "Holders", T.ARRAY), _out("count", "Count", T.NUMBER)],
    ),
    _node(
        "check-swap-routes", C.TOKEN, "Check Swap Routes", "Query swap routes between two mints",
        [
            _in("inputMint", "Input Mint", T.PUBLICKEY),
            _in("outputMint", "Output Mint", T.PUBLICKEY),
            _in("amount", "Amount", T.NUMBER),
        ],
        [
            _out("routes", "Routes", T.ARRAY),
            _out("bestRoute", "Best Route", T.OBJECT),
            _out("priceImpact", "Price Impact", T.NUMBER),
        ],
    ),
    _node(
        "check-liquidity-pools", C.TOKEN, "Check Liquidity Pools", "Find token accounts owned by a mint",
        [_CONNECTION, _in("mint", "Mint", T.PUBLICKEY)],
        [_out("pools", "Pools", T.ARRAY), _out("totalLiquidity", "Total Liquidity", T.NUMBER)],
    ),
    # Math
    _node(
        "math-add", C.MATH, "Add", "Add two numbers",
        [_in("a", "A", T.NUMBER), _in("b", "B", T.NUMBER)],
        [_out("result", "Result", T.NUMBER)],
    ),
    _node(
        "math-subtract", C.MATH, "Subtract", "Subtract two numbers",
        [_in("a", "A", T.NUMBER), _in("b", "B", T.NUMBER)],
        [_out("result", "Result", T.NUMBER)],
    ),
    _node(
        "math-multiply", C.MATH, "Multiply", "Multiply two numbers",
        [_in("a", "A", T.NUMBER), _in("b", "B", T.NUMBER)],
        [_out("result", "Result", T.NUMBER)],
    ),
    _node(
        "math-divide", C.MATH, "Divide", "Divide two numbers",
        [_in("a", "A", T.NUMBER), _in("b", "B", T.NUMBER)],
        [_out("result", "Result", T.NUMBER)],
    ),
    _node(
        "lamports-to-sol", C.MATH, "Lamports to SOL", "Convert lamports to SOL",
        [_in("lamports", "Lamports", T.NUMBER)],
        [_out("sol", "SOL", T.NUMBER)],
    ),
    _node(
        "sol-to-lamports", C.MATH, "SOL to Lamports", "Convert SOL to lamports",
        [_in("sol", "SOL", T.NUMBER)],
        [_out("lamports", "Lamports", T.NUMBER)],
    ),
    # Logic
    _node(
        "logic-compare", C.LOGIC, "Compare", "Compare two values",
        [_in("a", "A", T.ANY), _in("b", "B", T.ANY)],
        [_out("equal", "Equal", T.BOOLEAN), _out("greater", "A > B", T.BOOLEAN), _out("less", "A < B", T.BOOLEAN)],
    ),
    _node(
        "logic-and", C.LOGIC, "AND", "Logical AND operation",
        [_in("a", "A", T.BOOLEAN), _in("b", "B", T.BOOLEAN)],
        [_out("result", "Result", T.BOOLEAN)],
    ),
    _node(
        "logic-or", C.LOGIC, "OR", "Logical OR operation",
        [_in("a", "A", T.BOOLEAN), _in("b", "B", T.BOOLEAN)],
        [_out("result", "Result", T.BOOLEAN)],
    ),
    _node(
        "logic-not", C.LOGIC, "NOT", "Logical NOT operation",
        [_in("a", "Input", T.BOOLEAN)],
        [_out("result", "Result", T.BOOLEAN)],
    ),
    _node(
        "logic-switch", C.LOGIC, "Switch", "Switch between two values based on condition",
        [
            _in("condition", "Condition", T.BOOLEAN),
            _in("trueValue", "If True", T.ANY),
            _in("falseValue", "If False", T.ANY),
        ],
        [_out("result", "Result", T.ANY)],
    ),
    # Input (literal values live in node.values, not on input ports)
    _node("input-string", C.INPUT, "String Input", "Input a string value", [], [_out("value", "Value", T.STRING)]),
    _node("input-number", C.INPUT, "Number Input", "Input a number value", [], [_out("value", "Value", T.NUMBER)]),
    _node(
        "input-publickey", C.INPUT, "Public Key Input", "Input a Solana public key",
        [],
        [_out("publicKey", "Public Key", T.PUBLICKEY)],
    ),
    _node("input-boolean", C.INPUT, "Boolean Input", "Input a boolean value", [], [_out("value", "Value", T.BOOLEAN)]),
    # Output
    _node("output-display", C.OUTPUT, "Display", "Display a value", [_in("value", "Value", T.ANY)], []),
    _node(
        "output-log", C.OUTPUT, "Console Log", "Log value to console",
        [_in("value", "Value", T.ANY), _in("label", "Label", T.STRING, required=False)],
        [],
    ),
    # Loops / arrays / utility
    _node(
        "loop-for-each", C.UTILITY, "For Each", "Iterate over each item in an array",
        [_in("array", "Array", T.ARRAY)],
        [
            _out("item", "Current Item", T.ANY),
            _out("index", "Index", T.NUMBER),
            _out("result", "All Results", T.ARRAY),
        ],
    ),
    _node(
        "loop-repeat", C.UTILITY, "Repeat", "Repeat execution N times",
        [_in("times", "Times", T.NUMBER), _in("value", "Value", T.ANY, required=False)],
        [_out("index", "Current Index", T.NUMBER), _out("results", "All Results", T.ARRAY)],
    ),
    _node(
        "loop-range", C.UTILITY, "Range", "Generate array of numbers from start to end",
        [
            _in("start", "Start", T.NUMBER),
            _in("end", "End", T.NUMBER),
            _in("step", "Step", T.NUMBER, required=False, default=1),
        ],
        [_out("array", "Array", T.ARRAY)],
    ),
    _node(
        "array-length", C.UTILITY, "Array Length", "Get length of an array",
        [_in("array", "Array", T.ARRAY)],
        [_out("length", "Length", T.NUMBER)],
    ),
    _node(
        "array-get-item", C.UTILITY, "Get Array Item", "Get item at specific index",
        [_in("array", "Array", T.ARRAY), _in("index", "Index", T.NUMBER)],
        [_out("item", "Item", T.ANY)],
    ),
    _node(
        "utility-delay", C.UTILITY, "Delay", "Delay execution by specified milliseconds",
        [_in("input", "Input", T.ANY), _in("ms", "Milliseconds", T.NUMBER, default=1000)],
        [_out("output", "Output", T.ANY)],
    ),
    _node(
        "utility-json-parse", C.UTILITY, "Parse JSON", "Parse a JSON string",
        [_in("json", "JSON String", T.STRING)],
        [_out("object", "Object", T.OBJECT)],
    ),
    _node(
        "utility-json-stringify", C.UTILITY, "Stringify JSON", "Convert object to JSON string",
        [_in("object", "Object", T.OBJECT)],
        [_out("json", "JSON String", T.STRING)],
    ),
    _node(
        "utility-get-property", C.UTILITY, "Get Property", "Get a property from an object",
        [_in("object", "Object", T.OBJECT), _in("key", "Key", T.STRING)],
        [_out("value", "Value", T.ANY)],
    ),
]

_BY_TYPE: Dict[str, NodeDefinition] = {d.type: d for d in NODE_DEFINITIONS}


def lookup(node_type: str) -> Optional[NodeDefinition]:
    """Return the catalog entry for a node type, or None when unknown."""
    return _BY_TYPE.get(node_type)


def list_definitions(category: Optional[str] = None) -> List[NodeDefinition]:
    if not category:
        return list(NODE_DEFINITIONS)
    return [d for d in NODE_DEFINITIONS if d.category.value == category]
