# control-plane-api/scripts/generate_encryption_key.py
# In ra một TOKEN_ENCRYPTION_KEY mới (64 ký tự hex = 32 bytes) để đặt vào .env
from app.core.security import TokenCipher

if __name__ == "__main__":
    print(TokenCipher.generate_key())
