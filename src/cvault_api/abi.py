"""ABI of the ConfidentialVault contract (subset used by this client)."""

ConfidentialVault_abi = [
    {
        "type": "function",
        "name": "submitMetric",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "cipher", "type": "bytes", "internalType": "bytes"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "getMyEncryptedResult",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "bytes", "internalType": "bytes"}],
    },
    {
        "type": "function",
        "name": "getMyMetric",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "", "type": "bytes", "internalType": "bytes"},
            {"name": "", "type": "uint256", "internalType": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "postEncryptedResult",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "user", "type": "address", "internalType": "address"},
            {"name": "resultCipher", "type": "bytes", "internalType": "bytes"},
        ],
        "outputs": [],
    },
]
