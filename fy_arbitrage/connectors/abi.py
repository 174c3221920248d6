"""
Minimal ABIs for FY pools and the arbitrage router.
"""

POOL_ABI = [
    {
        "inputs": [{"name": "baseIn", "type": "uint128"}],
        "name": "sellBasePreview",
        "outputs": [{"name": "fyOut", "type": "uint128"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "fyIn", "type": "uint128"}],
        "name": "sellFYTokenPreview",
        "outputs": [{"name": "baseOut", "type": "uint128"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "fyOut", "type": "uint128"}],
        "name": "buyFYTokenPreview",
        "outputs": [{"name": "baseIn", "type": "uint128"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "baseOut", "type": "uint128"}],
        "name": "buyBasePreview",
        "outputs": [{"name": "fyIn", "type": "uint128"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "getCache",
        "outputs": [
            {"name": "baseReserves", "type": "uint128"},
            {"name": "fyReserves", "type": "uint128"},
            {"name": "feeBps", "type": "uint16"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "maturity",
        "outputs": [{"name": "", "type": "uint32"}],
        "stateMutability": "view",
        "type": "function",
    },
]

ROUTER_ABI = [
    {
        "inputs": [
            {"name": "cheapPool", "type": "address"},
            {"name": "richPool", "type": "address"},
            {"name": "fyOutTarget", "type": "uint128"},
            {"name": "maxBaseIn", "type": "uint128"},
            {"name": "minBaseOutRich", "type": "uint128"},
            {"name": "receiver", "type": "address"},
        ],
        "name": "arbBuyFYThenSellFY",
        "outputs": [
            {"name": "baseSpent", "type": "uint128"},
            {"name": "baseReceived", "type": "uint128"},
        ],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]
