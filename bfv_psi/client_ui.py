# client_ui.py
# Receiver UI:  streamlit run bfv_psi/client_ui.py
import os

import streamlit as st

from bfv_psi.client import DEFAULT_SENDER_URL, SenderClient
from bfv_psi.custom_fhe import SchemeParameters
from bfv_psi.dataset import encode_dataset
from bfv_psi.exceptions import PSIError
from bfv_psi.receiver import Receiver
from bfv_psi.report import format_intersection

# CONFIG
SENDER_URL = os.environ.get("PSI_SENDER_URL", DEFAULT_SENDER_URL)
DEGREES = [2048, 4096, 8192, 16384]

st.title("🔒 Private Set Intersection")
st.write("Encrypt your dataset locally. The Sender matches it blindly; only you can read the result.")

sender_url = st.text_input("Sender URL", value=SENDER_URL)
degree = st.selectbox("Polynomial modulus degree", DEGREES, index=DEGREES.index(4096))
uploaded = st.file_uploader("Receiver dataset (one bitstring per line)", type=["txt"])

# 1. KEYS & ENCRYPTION (Local)
if uploaded is not None and st.button("Generate Keys & Encrypt"):
    lines = uploaded.getvalue().decode("utf-8").splitlines()
    try:
        dataset = encode_dataset(line.strip() for line in lines if line.strip())
        with st.spinner("Generating keys and encrypting locally..."):
            receiver = Receiver(SchemeParameters(degree), dataset)
            st.session_state.receiver = receiver
            st.session_state.query = receiver.encrypt_dataset()
        st.success(f"{len(dataset)} elements encrypted. The secret key stays on this machine.")
    except PSIError as e:
        st.error(str(e))

# 2. SEND TO SENDER
if 'query' in st.session_state:
    st.write("---")
    st.write("### ☁️ Sender Interaction")

    if st.button("Send to Sender"):
        receiver = st.session_state.receiver
        client = SenderClient(sender_url)
        try:
            with st.spinner("Sender is computing on encrypted data..."):
                result_cipher = client.intersect(receiver.public_bundle(), st.session_state.query)

            # 3. DECRYPTION (Happens Locally)
            result = receiver.decrypt_and_intersect(result_cipher)
        except PSIError as e:
            st.error(str(e))
        else:
            st.write("### 🔓 Intersection")
            st.code(format_intersection(result))
            st.write(f"Remaining noise budget: {result.noise_budget} bits")
            if result.noise_exhausted:
                st.warning("Noise budget exhausted: the result is unreliable.")
